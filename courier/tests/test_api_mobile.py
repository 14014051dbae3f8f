"""
FRITOLAY Courier Tests - Mobile API
====================================

Tests for:
1. Courier login (role and activation checks)
2. Dashboard counts and recent assignments
3. Assignment list/detail scoped to the courier
4. Status updates, photo upload and location tracking
"""

import io

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from PIL import Image

from core.tests.fakes import SupabaseTestCase, make_profile
from courier.services import count_by_status
from logistics.models import DeliveryAssignment


def make_photo(name='entrega.png'):
    buffer = io.BytesIO()
    Image.new('RGB', (2, 2), color='orange').save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


class TestCourierLogin(SupabaseTestCase):

    def setUp(self):
        super().setUp()
        self.fake.auth.add_user('juan@fritolay.pe', 'clave123', user_id='r1')
        self.fake.auth.add_user('ana@fritolay.pe', 'clave123', user_id='admin-1')
        self.fake.seed('user_profiles', [
            make_profile('r1', role='repartidor', email='juan@fritolay.pe'),
            make_profile('admin-1', role='admin', email='ana@fritolay.pe'),
        ])

    def test_login(self):
        response = self.api.post('/api/mobile/auth/login/', {
            'email': 'Juan@FritoLay.pe', 'password': 'clave123',
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['user']['id'], 'r1')

    def test_admin_cannot_login_to_courier_app(self):
        response = self.api.post('/api/mobile/auth/login/', {
            'email': 'ana@fritolay.pe', 'password': 'clave123',
        }, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Este usuario no es un repartidor')

    def test_inactive_courier(self):
        self.fake.rows('user_profiles')[0]['is_active'] = False

        response = self.api.post('/api/mobile/auth/login/', {
            'email': 'juan@fritolay.pe', 'password': 'clave123',
        }, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Tu cuenta está desactivada')

    def test_refresh_with_bad_token(self):
        response = self.api.post('/api/mobile/auth/refresh/', {'refresh_token': 'nope'}, format='json')
        self.assertEqual(response.status_code, 401)


class CourierApiTestCase(SupabaseTestCase):

    def setUp(self):
        super().setUp()
        self.fake.seed('delivery_assignments', [
            {'id': f'a{n}', 'order_id': f'o{n}', 'repartidor_id': 'r1', 'status': status,
             'assigned_at': f'2026-10-{n:02d}T09:00:00+00:00'}
            for n, status in enumerate(
                ['assigned', 'assigned', 'in_transit', 'delivered', 'delivered', 'failed', 'delivered'],
                start=1,
            )
        ])
        self.fake.seed('delivery_assignments', [
            {'id': 'other', 'order_id': 'o99', 'repartidor_id': 'r2', 'status': 'assigned'},
        ])
        self.fake.seed('delivery_orders', [
            {'id': 'o1', 'order_number': 'FL-1', 'total': 20, 'delivery_address': 'Jr. Puno 456'},
        ])
        self.courier = self.authenticate(make_profile('r1', role='repartidor', name='Juan'))


class TestDashboard(CourierApiTestCase):

    def test_count_by_status(self):
        counts = count_by_status([
            DeliveryAssignment(id='1', order_id='o', repartidor_id='r', status='assigned'),
            DeliveryAssignment(id='2', order_id='o', repartidor_id='r', status='delivered'),
        ])
        self.assertEqual(counts, {'total': 2, 'assigned': 1, 'in_transit': 0, 'delivered': 1, 'failed': 0})

    def test_dashboard(self):
        response = self.api.get('/api/mobile/dashboard/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['stats'], {
            'total': 7, 'assigned': 2, 'in_transit': 1, 'delivered': 3, 'failed': 1,
        })
        recent = [a['id'] for a in response.data['recent_assignments']]
        self.assertEqual(recent, ['a7', 'a6', 'a5', 'a4', 'a3'])
        self.assertTrue(response.data['has_more'])
        self.assertEqual(response.data['courier']['name'], 'Juan')

    @override_settings(COURIER_RECENT_ASSIGNMENTS=10)
    def test_recent_limit_is_configurable(self):
        response = self.api.get('/api/mobile/dashboard/')

        self.assertEqual(len(response.data['recent_assignments']), 7)
        self.assertFalse(response.data['has_more'])

    def test_admin_cannot_use_mobile_api(self):
        self.authenticate(make_profile('admin-1', role='admin'))

        response = self.api.get('/api/mobile/dashboard/')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Acceso restringido a repartidores')

    def test_profile(self):
        response = self.api.get('/api/mobile/profile/')
        self.assertEqual(response.data['name'], 'Juan')


class TestAssignmentEndpoints(CourierApiTestCase):

    def test_list_with_filter(self):
        response = self.api.get('/api/mobile/assignments/', {'status': 'delivered'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([a['id'] for a in response.data['assignments']], ['a7', 'a5', 'a4'])

    def test_list_invalid_filter(self):
        response = self.api.get('/api/mobile/assignments/', {'status': 'lost'})
        self.assertEqual(response.status_code, 400)

    def test_detail(self):
        response = self.api.get('/api/mobile/assignments/a1/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['order']['order_number'], 'FL-1')
        self.assertEqual(response.data['order']['delivery_address'], 'Jr. Puno 456')

    def test_detail_of_other_courier(self):
        response = self.api.get('/api/mobile/assignments/other/')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['message'], 'Asignación no encontrada')

    def test_status_update(self):
        response = self.api.patch('/api/mobile/assignments/a1/status/', {
            'status': 'in_transit', 'notes': 'Saliendo del almacén',
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'in_transit')
        self.assertEqual(response.data['assignment']['delivery_notes'], 'Saliendo del almacén')
        self.assertEqual(self.fake.rows('delivery_orders')[0]['delivery_status'], 'in_transit')

    def test_illegal_status_update(self):
        response = self.api.patch('/api/mobile/assignments/a4/status/', {'status': 'in_transit'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Transición de estado inválida: delivered -> in_transit')

    def test_status_update_other_courier(self):
        response = self.api.patch('/api/mobile/assignments/other/status/', {'status': 'in_transit'}, format='json')
        self.assertEqual(response.status_code, 404)

    def test_photo_upload(self):
        response = self.api.post('/api/mobile/assignments/a3/photo/', {'photo': make_photo()}, format='multipart')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['url'].startswith(
            'https://fake.supabase.co/storage/v1/object/public/deliveries/delivery-photos/a3_'
        ))
        self.assertEqual(self.fake.uploads[0]['options'], {'content-type': 'image/png'})

    def test_photo_upload_failure(self):
        self.fake.storage_error = 'Bucket not found'

        response = self.api.post('/api/mobile/assignments/a3/photo/', {'photo': make_photo()}, format='multipart')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['message'], 'No se pudo subir la foto')

    def test_photo_required(self):
        response = self.api.post('/api/mobile/assignments/a3/photo/', {}, format='multipart')
        self.assertEqual(response.status_code, 400)

    def test_location(self):
        response = self.api.post('/api/mobile/assignments/a3/location/', {
            'latitude': -12.0464, 'longitude': -77.0428, 'accuracy': 12,
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['success'])
        self.assertEqual(self.fake.rows('delivery_tracking')[0]['longitude'], -77.0428)

    def test_location_validation(self):
        response = self.api.post('/api/mobile/assignments/a3/location/', {'latitude': 200, 'longitude': 0}, format='json')
        self.assertEqual(response.status_code, 400)
