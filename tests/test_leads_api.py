"""
Tests for the leads API endpoints
"""
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.test import Client
from django.utils import timezone

from leads.models import Lead

LEADS_URL = '/api/leads/'


def lead_url(lead_id):
    return f'{LEADS_URL}{lead_id}'


@pytest.mark.django_db
class TestCreateLead:
    def test_minimal_body_gets_defaults(self, api_client, test_user):
        response = api_client.post(LEADS_URL, {
            'first_name': 'Ann',
            'last_name': 'Lee',
            'email': 'ann@x.com',
        }, content_type='application/json')

        assert response.status_code == 201
        lead = response.json()['lead']
        assert lead['source'] == 'website'
        assert lead['status'] == 'new'
        assert lead['score'] == 0
        assert lead['lead_value'] == 0
        assert lead['is_qualified'] is False
        assert lead['last_activity_at'] is None
        assert lead['full_name'] == 'Ann Lee'
        assert lead['owner_id'] == test_user.id
        assert Lead.objects.get(pk=lead['id']).owner == test_user

    def test_fields_are_trimmed_and_email_lowercased(self, api_client):
        response = api_client.post(LEADS_URL, {
            'first_name': '  Ann ',
            'last_name': 'Lee',
            'email': ' Ann@X.COM ',
            'city': ' Austin ',
        }, content_type='application/json')

        assert response.status_code == 201
        lead = response.json()['lead']
        assert lead['first_name'] == 'Ann'
        assert lead['email'] == 'ann@x.com'
        assert lead['city'] == 'Austin'

    def test_full_body(self, api_client, sample_lead_data):
        response = api_client.post(LEADS_URL, sample_lead_data, content_type='application/json')
        assert response.status_code == 201
        lead = response.json()['lead']
        for key, value in sample_lead_data.items():
            assert lead[key] == value

    @pytest.mark.parametrize('override, field', [
        ({'score': 101}, 'score'),
        ({'score': -1}, 'score'),
        ({'lead_value': -5}, 'lead_value'),
        ({'status': 'archived'}, 'status'),
        ({'source': 'tv'}, 'source'),
        ({'email': 'not-an-email'}, 'email'),
        ({'first_name': '   '}, 'first_name'),
        ({'owner': 99}, 'owner'),
    ])
    def test_validation_errors_are_field_level_400(self, api_client, sample_lead_data, override, field):
        body = dict(sample_lead_data, **override)
        response = api_client.post(LEADS_URL, body, content_type='application/json')

        assert response.status_code == 400
        errors = response.json()['errors']
        assert field in [error['field'] for error in errors]
        assert Lead.objects.count() == 0

    def test_missing_required_fields(self, api_client):
        response = api_client.post(LEADS_URL, {'first_name': 'Ann'}, content_type='application/json')
        assert response.status_code == 400
        fields = {error['field'] for error in response.json()['errors']}
        assert {'last_name', 'email'} <= fields

    def test_duplicate_email(self, api_client, make_lead):
        make_lead(email='ann@x.com')
        response = api_client.post(LEADS_URL, {
            'first_name': 'Ann', 'last_name': 'Lee', 'email': 'ANN@x.com',
        }, content_type='application/json')

        assert response.status_code == 400
        assert response.json() == {'error': 'Email already exists'}

    def test_store_failure_is_generic_500(self, api_client):
        with patch('leads.models.Lead.save', side_effect=DatabaseError('disk full')):
            response = api_client.post(LEADS_URL, {
                'first_name': 'Ann', 'last_name': 'Lee', 'email': 'ann@x.com',
            }, content_type='application/json')

        assert response.status_code == 500
        assert response.json() == {'error': 'Failed to create lead'}
        assert 'disk full' not in response.content.decode()


@pytest.mark.django_db
class TestListLeads:
    def test_envelope_and_defaults(self, api_client, make_lead):
        for _ in range(3):
            make_lead()

        response = api_client.get(LEADS_URL)

        assert response.status_code == 200
        body = response.json()
        assert body['page'] == 1
        assert body['limit'] == 20
        assert body['total'] == 3
        assert body['totalPages'] == 1
        assert len(body['data']) == 3

    def test_pagination_newest_first(self, api_client, make_lead):
        leads = [make_lead() for _ in range(5)]
        base = timezone.now() - timedelta(hours=1)
        for offset, lead in enumerate(leads):
            Lead.objects.filter(pk=lead.pk).update(created_at=base + timedelta(minutes=offset))

        first = api_client.get(LEADS_URL, {'page': 1, 'limit': 2}).json()
        third = api_client.get(LEADS_URL, {'page': 3, 'limit': 2}).json()

        assert first['totalPages'] == 3
        assert [lead['id'] for lead in first['data']] == [leads[4].pk, leads[3].pk]
        assert [lead['id'] for lead in third['data']] == [leads[0].pk]

    @pytest.mark.parametrize('params', [{'page': 0}, {'limit': 0}, {'limit': 101}, {'page': 'two'}])
    def test_out_of_range_paging_is_400(self, api_client, params):
        response = api_client.get(LEADS_URL, params)
        assert response.status_code == 400
        assert response.json()['errors']

    def test_score_gt_filter(self, api_client, make_lead):
        make_lead(score=50)
        match = make_lead(score=51)

        body = api_client.get(LEADS_URL, {'score': '50', 'score_operator': 'gt'}).json()

        assert [lead['id'] for lead in body['data']] == [match.pk]
        assert body['total'] == 1

    def test_contains_and_enum_in_filters(self, api_client, make_lead):
        match = make_lead(company='TechCorp', status='won')
        make_lead(company='TechCorp', status='lost')
        make_lead(company='Apex', status='won')

        response = api_client.get(
            LEADS_URL + '?company=techc&company_operator=contains'
            '&status=won&status=new&status_operator=in'
        )

        assert [lead['id'] for lead in response.json()['data']] == [match.pk]

    def test_boolean_and_passthrough_filters(self, api_client, make_lead):
        match = make_lead(is_qualified=True, state='TX')
        make_lead(is_qualified=False, state='TX')
        make_lead(is_qualified=True, state='CA')

        body = api_client.get(LEADS_URL, {'is_qualified': 'true', 'state': 'TX'}).json()

        assert [lead['id'] for lead in body['data']] == [match.pk]

    def test_unknown_and_malformed_filters_are_ignored(self, api_client, make_lead):
        make_lead()
        body = api_client.get(LEADS_URL, {
            'nonexistent': 'x', 'score': 'high', 'created_at': 'someday', 'city': '',
        }).json()
        assert body['total'] == 1

    @pytest.mark.parametrize('params', [
        {'created_at': '9999-12-31'},
        {'last_activity_at': '9999-12-31', 'last_activity_at_operator': 'on'},
    ])
    def test_out_of_range_date_filter_is_ignored(self, api_client, make_lead, params):
        make_lead()
        response = api_client.get(LEADS_URL, params)
        assert response.status_code == 200
        assert response.json()['total'] == 1

    def test_exact_email_filter_ignores_case(self, api_client, make_lead):
        match = make_lead(email='ann@x.com')
        make_lead(email='bob@x.com')

        body = api_client.get(LEADS_URL, {'email': 'Ann@X.COM'}).json()

        assert [lead['id'] for lead in body['data']] == [match.pk]

    def test_fractional_score_filters(self, api_client, make_lead):
        make_lead(score=10)
        make_lead(score=50)

        exact = api_client.get(LEADS_URL, {'score': '50.5'}).json()
        between = api_client.get(LEADS_URL, {'score': '10.5,20', 'score_operator': 'between'}).json()

        assert exact['total'] == 0
        assert between['total'] == 0

    def test_only_own_leads_are_listed(self, api_client, make_lead, other_user):
        mine = make_lead()
        make_lead(owner=other_user)

        body = api_client.get(LEADS_URL).json()

        assert [lead['id'] for lead in body['data']] == [mine.pk]

    def test_requires_token(self, make_lead):
        assert Client().get(LEADS_URL).status_code == 401
        bad = Client(HTTP_AUTHORIZATION='Bearer not-a-token')
        assert bad.get(LEADS_URL).status_code == 401


@pytest.mark.django_db
class TestSingleLead:
    def test_get(self, api_client, make_lead):
        lead = make_lead(company='Acme')
        response = api_client.get(lead_url(lead.pk))
        assert response.status_code == 200
        assert response.json()['lead']['company'] == 'Acme'

    def test_partial_update(self, api_client, make_lead):
        lead = make_lead(company='Acme', score=10)

        response = api_client.put(lead_url(lead.pk), {'score': 80, 'status': 'qualified'},
                                  content_type='application/json')

        assert response.status_code == 200
        body = response.json()['lead']
        assert body['score'] == 80
        assert body['status'] == 'qualified'
        assert body['company'] == 'Acme'

    def test_update_rejects_owner_and_unknown_fields(self, api_client, make_lead, other_user):
        lead = make_lead()
        for body in ({'owner': other_user.id}, {'owner_id': other_user.id}, {'favourite_colour': 'red'}):
            response = api_client.put(lead_url(lead.pk), body, content_type='application/json')
            assert response.status_code == 400
        lead.refresh_from_db()
        assert lead.owner_id != other_user.id

    def test_update_rejects_null_for_required_field(self, api_client, make_lead):
        lead = make_lead()
        response = api_client.put(lead_url(lead.pk), {'first_name': None}, content_type='application/json')
        assert response.status_code == 400

    def test_update_clears_optional_text_with_null(self, api_client, make_lead):
        lead = make_lead(phone='555')
        response = api_client.put(lead_url(lead.pk), {'phone': None}, content_type='application/json')
        assert response.status_code == 200
        assert response.json()['lead']['phone'] == ''

    def test_update_duplicate_email(self, api_client, make_lead):
        make_lead(email='taken@example.com')
        lead = make_lead()
        response = api_client.put(lead_url(lead.pk), {'email': 'taken@example.com'},
                                  content_type='application/json')
        assert response.status_code == 400
        assert response.json() == {'error': 'Email already exists'}

    def test_delete(self, api_client, make_lead):
        lead = make_lead()

        response = api_client.delete(lead_url(lead.pk))

        assert response.status_code == 200
        assert response.json()['lead']['id'] == lead.pk
        assert not Lead.objects.filter(pk=lead.pk).exists()
        assert api_client.get(lead_url(lead.pk)).status_code == 404


@pytest.mark.django_db
class TestTenantIsolation:
    def test_foreign_lead_is_indistinguishable_from_missing(self, api_client, make_lead, other_user):
        foreign = make_lead(owner=other_user, company='Secret')
        missing = foreign.pk + 1000

        for lead_id in (foreign.pk, missing):
            responses = [
                api_client.get(lead_url(lead_id)),
                api_client.put(lead_url(lead_id), {'company': 'Mine'}, content_type='application/json'),
                api_client.delete(lead_url(lead_id)),
            ]
            for response in responses:
                assert response.status_code == 404
                assert response.json() == {'error': 'Lead not found'}

        foreign.refresh_from_db()
        assert foreign.company == 'Secret'

    def test_same_email_in_different_tenants(self, api_client, other_client):
        body = {'first_name': 'Ann', 'last_name': 'Lee', 'email': 'ann@x.com'}
        assert api_client.post(LEADS_URL, body, content_type='application/json').status_code == 201
        assert other_client.post(LEADS_URL, body, content_type='application/json').status_code == 201
