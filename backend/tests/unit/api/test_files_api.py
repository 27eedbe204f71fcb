"""
Unit Tests for File Upload and Review API Endpoints
"""
import pytest
from httpx import AsyncClient

from drawhub.models import UserRole


def pdf_part(name='report.pdf', data=b'%PDF-1.4 drawing'):
    return ('files', (name, data, 'application/pdf'))


class TestUpload:

    async def test_upload_and_reupload(self, client: AsyncClient, admin_user, analista_user, analista_headers, make_project):
        project = await make_project(admin_user, assigned=[analista_user])
        url = f'/api/v1/projects/{project.id}/files'

        first = await client.post(url, files=[pdf_part()], headers=analista_headers)
        second = await client.post(url, files=[pdf_part()], headers=analista_headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()['uploaded'][0]['name'] == 'report.pdf'
        assert first.json()['uploaded'][0]['version'] == 1
        assert first.json()['uploaded'][0]['status'] == 'pendente'
        assert second.json()['uploaded'][0]['name'] == 'report_v2.pdf'
        assert second.json()['uploaded'][0]['version'] == 2
        assert 'path' not in second.json()['uploaded'][0]

    async def test_mixed_batch(self, client: AsyncClient, admin_user, admin_headers, make_project):
        project = await make_project(admin_user)

        response = await client.post(
            f'/api/v1/projects/{project.id}/files',
            files=[
                ('files', ('foto.png', b'png', 'image/png')),
                ('files', ('PLANTA.DWG', b'AC1027', 'application/octet-stream')),
            ],
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert [f['name'] for f in data['uploaded']] == ['PLANTA.DWG']
        assert data['rejected'] == [{
            'filename': 'foto.png',
            'code': 'INVALID_FILE_TYPE',
            'message': 'Apenas arquivos .dwg e .pdf são permitidos',
        }]

    async def test_no_valid_file(self, client: AsyncClient, admin_user, admin_headers, make_project):
        project = await make_project(admin_user)

        response = await client.post(
            f'/api/v1/projects/{project.id}/files',
            files=[('files', ('foto.png', b'png', 'image/png'))],
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'EMPTY_UPLOAD'
        assert response.json()['details']['rejected'][0]['filename'] == 'foto.png'

    async def test_hidden_project(self, client: AsyncClient, admin_user, analista_headers, make_project):
        project = await make_project(admin_user)

        response = await client.post(
            f'/api/v1/projects/{project.id}/files', files=[pdf_part()], headers=analista_headers
        )

        assert response.status_code == 404

    async def test_requires_auth(self, client: AsyncClient, admin_user, make_project):
        project = await make_project(admin_user)

        response = await client.post(f'/api/v1/projects/{project.id}/files', files=[pdf_part()])

        assert response.status_code == 401

    async def test_list_files_newest_first(self, client: AsyncClient, admin_user, admin_headers, make_project):
        project = await make_project(admin_user)
        url = f'/api/v1/projects/{project.id}/files'
        await client.post(url, files=[pdf_part('a.pdf')], headers=admin_headers)
        await client.post(url, files=[pdf_part('b.pdf')], headers=admin_headers)

        response = await client.get(url, headers=admin_headers)

        assert response.status_code == 200
        assert [f['name'] for f in response.json()] == ['b.pdf', 'a.pdf']


class TestReview:

    async def _upload(self, client, project, headers):
        response = await client.post(
            f'/api/v1/projects/{project.id}/files', files=[pdf_part()], headers=headers
        )
        return response.json()['uploaded'][0]['id']

    async def test_gestor_final_approves(self, client: AsyncClient, admin_user, admin_headers,
                                         gestor_final_user, gestor_final_headers, make_project):
        project = await make_project(admin_user)
        file_id = await self._upload(client, project, admin_headers)

        response = await client.put(
            f'/api/v1/files/{file_id}/status',
            json={'status': 'aprovado', 'review_notes': 'OK'},
            headers=gestor_final_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'aprovado'
        assert data['reviewed_by_id'] == gestor_final_user.id
        assert data['reviewed_at'] is not None
        assert data['review_notes'] == 'OK'

    async def test_analista_forbidden(self, client: AsyncClient, admin_user, admin_headers,
                                      analista_user, analista_headers, make_project):
        project = await make_project(admin_user, assigned=[analista_user])
        file_id = await self._upload(client, project, admin_headers)

        response = await client.put(
            f'/api/v1/files/{file_id}/status', json={'status': 'aprovado'}, headers=analista_headers
        )

        assert response.status_code == 403
        files = await client.get(f'/api/v1/projects/{project.id}/files', headers=analista_headers)
        assert files.json()[0]['status'] == 'pendente'

    async def test_pendente_not_allowed(self, client: AsyncClient, admin_user, admin_headers, make_project):
        project = await make_project(admin_user)
        file_id = await self._upload(client, project, admin_headers)

        response = await client.put(
            f'/api/v1/files/{file_id}/status', json={'status': 'pendente'}, headers=admin_headers
        )

        assert response.status_code == 400

    async def test_unknown_status(self, client: AsyncClient, admin_user, admin_headers, make_project):
        project = await make_project(admin_user)
        file_id = await self._upload(client, project, admin_headers)

        response = await client.put(
            f'/api/v1/files/{file_id}/status', json={'status': 'arquivado'}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'VALIDATION_ERROR'

    async def test_missing_file(self, client: AsyncClient, admin_headers):
        response = await client.put(
            '/api/v1/files/missing/status', json={'status': 'aprovado'}, headers=admin_headers
        )

        assert response.status_code == 404
        assert response.json()['message'] == 'Arquivo não encontrado'
