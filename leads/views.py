from django.conf import settings
from django.shortcuts import render

from leads.models import LeadSource, LeadStatus


def dashboard_view(request):
    """Leads dashboard page. Authentication happens client side with a JWT."""
    return render(request, 'leads/dashboard.html', {
        'statuses': LeadStatus.choices,
        'sources': LeadSource.choices,
        'page_size': settings.LEADS_DEFAULT_PAGE_SIZE,
    })
