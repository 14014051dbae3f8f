"""
FRITOLAY Fleet Tests - Courier Management

Tests for:
1. Listing couriers (all / active only)
2. Registering a courier with its profile fields
3. Updating only repartidor profiles
4. Removing a courier (assignments, profile, auth user)
"""

from core.exceptions import NotFound
from core.tests.fakes import SupabaseTestCase, make_profile
from fleet.services import FleetService, build_courier_update


class FleetTestCase(SupabaseTestCase):

    def setUp(self):
        super().setUp()
        self.fake.seed('user_profiles', [
            make_profile('r1', name='Juan', created_at='2026-10-01T10:00:00+00:00'),
            make_profile('r2', name='Rosa', is_active=None, created_at='2026-10-03T10:00:00+00:00'),
            make_profile('r3', name='Luis', is_active=False, created_at='2026-10-02T10:00:00+00:00'),
            make_profile('c1', role='comerciante'),
        ])
        self.admin = self.authenticate(make_profile('admin-1', role='admin'))


class TestFleetService(FleetTestCase):

    def test_list_newest_first(self):
        couriers = FleetService().list_couriers()
        self.assertEqual([c['id'] for c in couriers], ['r2', 'r3', 'r1'])

    def test_list_active_only_keeps_null(self):
        couriers = FleetService().list_couriers(active_only=True)
        self.assertEqual([c['id'] for c in couriers], ['r2', 'r1'])

    def test_build_update(self):
        self.assertEqual(
            build_courier_update({'name': '  Juan Pérez ', 'phone': '', 'is_active': False}),
            {'name': 'Juan Pérez', 'phone': None, 'is_active': False},
        )
        self.assertEqual(build_courier_update({}), {})

    def test_update_ignores_other_roles(self):
        with self.assertRaises(NotFound) as ctx:
            FleetService().update_courier('c1', {'name': 'Otro'})
        self.assertEqual(ctx.exception.message, 'Repartidor no encontrado')
        self.assertEqual(self.fake.rows('user_profiles')[3]['name'], 'Usuario c1')

    def test_register_sets_courier_fields(self):
        result = FleetService().register_courier(
            'Nuevo@FritoLay.pe', 'clave123', ' Pedro ', phone='987654321', license_number='',
        )

        profile = next(p for p in self.fake.rows('user_profiles') if p['id'] == result['user_id'])
        self.assertEqual(profile['role'], 'repartidor')
        self.assertEqual(profile['email'], 'nuevo@fritolay.pe')
        self.assertEqual(profile['name'], 'Pedro')
        self.assertEqual(profile['phone'], '987654321')
        self.assertIsNone(profile['license_number'])
        self.assertFalse(profile['phone_verified'])
        self.assertEqual(profile['preferences'], {'notifications': True, 'theme': 'auto'})


class TestCourierEndpoints(FleetTestCase):

    def test_list(self):
        response = self.api.get('/api/repartidores/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 3)
        self.assertIn('no-cache', response['Cache-Control'])

    def test_list_requires_admin(self):
        self.authenticate(make_profile('r1', name='Juan'))

        response = self.api.get('/api/repartidores/')
        self.assertEqual(response.status_code, 403)

    def test_list_backend_error(self):
        self.fake.fail('user_profiles', 'permission denied for table user_profiles', code='42501')

        response = self.api.get('/api/repartidores/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['message'], 'Error al cargar repartidores')

    def test_register(self):
        response = self.api.post('/api/repartidores/register/', {
            'email': 'pedro@fritolay.pe', 'password': 'clave123', 'name': 'Pedro',
            'phone': '987654321', 'license_number': 'Q12345678',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Repartidor creado exitosamente')
        self.assertEqual(response.data['userId'], response.data['profileId'])

    def test_register_duplicate_email(self):
        self.fake.auth.add_user('r1@fritolay.pe', 'clave123', user_id='r1')

        response = self.api.post('/api/repartidores/register/', {
            'email': 'r1@fritolay.pe', 'password': 'clave123', 'name': 'Juan',
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Este email ya está registrado')

    def test_update(self):
        response = self.api.patch('/api/repartidores/r1/', {
            'name': ' Juan Pérez ', 'license_number': '', 'phone_verified': True,
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Repartidor actualizado exitosamente')
        row = self.fake.rows('user_profiles')[0]
        self.assertEqual(row['name'], 'Juan Pérez')
        self.assertIsNone(row['license_number'])
        self.assertTrue(row['phone_verified'])

    def test_update_without_fields(self):
        response = self.api.patch('/api/repartidores/r1/', {}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_update_failure(self):
        self.fake.fail('user_profiles', 'boom', operation='update')

        response = self.api.patch('/api/repartidores/r1/', {'is_active': False}, format='json')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['message'], 'No se pudo actualizar el repartidor')

    def test_delete(self):
        self.fake.seed('delivery_assignments', [
            {'id': 'a1', 'order_id': 'o1', 'repartidor_id': 'r1', 'status': 'assigned'},
            {'id': 'a2', 'order_id': 'o2', 'repartidor_id': 'r2', 'status': 'assigned'},
        ])

        response = self.api.delete('/api/repartidores/r1/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {'message': 'Repartidor eliminado exitosamente'})
        self.assertEqual([a['id'] for a in self.fake.rows('delivery_assignments')], ['a2'])
        self.assertNotIn('r1', [p['id'] for p in self.fake.rows('user_profiles')])
        self.assertEqual(self.fake.auth.deleted, ['r1'])

    def test_delete_non_courier(self):
        response = self.api.delete('/api/repartidores/c1/')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['message'], 'Usuario no encontrado o no es un repartidor')
        self.assertEqual(self.fake.auth.deleted, [])

    def test_delete_continues_when_assignments_fail(self):
        self.fake.fail('delivery_assignments', 'boom', operation='delete')

        response = self.api.delete('/api/repartidores/r1/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.fake.auth.deleted, ['r1'])

    def test_delete_profile_failure(self):
        self.fake.fail('user_profiles', 'foreign key violation', operation='delete')

        response = self.api.delete('/api/repartidores/r1/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['message'], 'Error eliminando perfil: foreign key violation')
        self.assertEqual(self.fake.auth.deleted, [])

    def test_delete_auth_failure_is_partial_success(self):
        self.fake.auth.delete_error = 'User not found'

        response = self.api.delete('/api/repartidores/r1/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['warning'], 'User not found')
        self.assertNotIn('r1', [p['id'] for p in self.fake.rows('user_profiles')])
