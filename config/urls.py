"""
URL configuration for config project.
"""
from django.contrib import admin
from django.urls import path
from ninja import NinjaAPI
from ninja.errors import ValidationError

from authentication.api import router as auth_router
from leads.api import router as leads_router
from leads.views import dashboard_view

# Create NinjaAPI instance
api = NinjaAPI(
    title="Lead Manager API",
    description="Multi-tenant lead management API",
    version="1.0.0"
)

# Register API routers
api.add_router("/auth", auth_router, tags=["Authentication"])
api.add_router("/leads", leads_router, tags=["Leads"])

IGNORED_LOCATIONS = ("body", "query", "path", "data", "filters")


@api.exception_handler(ValidationError)
def validation_errors(request, exc):
    """Report schema failures as a 400 with one entry per offending field"""
    errors = []
    for error in exc.errors:
        field = ".".join(
            str(part) for part in error.get("loc", ()) if part not in IGNORED_LOCATIONS
        )
        errors.append({"field": field, "message": error.get("msg", "Invalid value")})
    return api.create_response(request, {"errors": errors}, status=400)


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
    # Dashboard
    path('', dashboard_view, name='dashboard'),
]
