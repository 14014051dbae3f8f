"""
Tests for the core API: auth endpoints, user management, permissions,
bearer authentication and health checks.
"""

from unittest.mock import patch

from rest_framework import exceptions
from rest_framework.settings import api_settings
from rest_framework.test import APIRequestFactory

from core.authentication import SupabaseTokenAuthentication
from core.exceptions import NotFound
from core.handlers import api_exception_handler
from core.tests.fakes import SupabaseTestCase, make_profile


class TestAuthEndpoints(SupabaseTestCase):

    def setUp(self):
        super().setUp()
        self.fake.auth.add_user('admin@fritolay.pe', 'clave123', user_id='admin-1')
        self.fake.seed('user_profiles', [
            make_profile('admin-1', role='admin', email='admin@fritolay.pe'),
        ])

    def test_admin_login(self):
        response = self.api.post('/api/auth/login/', {
            'email': 'admin@fritolay.pe', 'password': 'clave123',
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['user']['role'], 'admin')
        self.assertIn('access_token', response.data)

    def test_admin_login_bad_password(self):
        response = self.api.post('/api/auth/login/', {
            'email': 'admin@fritolay.pe', 'password': 'nope',
        }, format='json')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['message'], 'Credenciales inválidas')

    def test_login_validation_error_shape(self):
        response = self.api.post('/api/auth/login/', {'email': 'admin@fritolay.pe'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Datos inválidos')
        self.assertIn('password', response.data['errors'])

    def test_register_admin(self):
        response = self.api.post('/api/auth/register/', {
            'email': 'nuevo@fritolay.pe', 'password': 'clave123', 'name': 'Nuevo',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Administrador creado exitosamente')
        profile = next(p for p in self.fake.rows('user_profiles') if p['email'] == 'nuevo@fritolay.pe')
        self.assertEqual(profile['role'], 'admin')

    def test_register_duplicate(self):
        response = self.api.post('/api/auth/register/', {
            'email': 'admin@fritolay.pe', 'password': 'clave123', 'name': 'Otra',
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Este email ya está registrado')

    def test_refresh(self):
        login = self.api.post('/api/auth/login/', {
            'email': 'admin@fritolay.pe', 'password': 'clave123',
        }, format='json')

        response = self.api.post('/api/auth/refresh/', {
            'refresh_token': login.data['refresh_token'],
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertIn('access_token', response.data)

    def test_me(self):
        self.authenticate(self.fake.rows('user_profiles')[0])

        response = self.api.get('/api/auth/me/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['id'], 'admin-1')


class TestUserEndpoints(SupabaseTestCase):

    def setUp(self):
        super().setUp()
        self.admin = make_profile('admin-1', role='admin')
        self.fake.seed('user_profiles', [
            self.admin,
            make_profile('c1', role='comerciante'),
        ])

    def test_requires_authentication(self):
        response = self.api.get('/api/users/')
        self.assertEqual(response.status_code, 401)

    def test_requires_admin(self):
        self.authenticate(make_profile('r1', role='repartidor'))

        response = self.api.get('/api/users/')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Acceso restringido a administradores')

    def test_inactive_admin_is_rejected(self):
        self.authenticate(make_profile('admin-2', role='admin', is_active=False))

        response = self.api.get('/api/users/')

        self.assertEqual(response.status_code, 403)

    def test_list_users_not_cached(self):
        self.authenticate(self.admin)

        response = self.api.get('/api/users/', {'role': 'comerciante'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([u['id'] for u in response.data], ['c1'])
        self.assertIn('no-cache', response['Cache-Control'])

    def test_patch_user(self):
        self.authenticate(self.admin)

        response = self.api.patch('/api/users/c1/', {'role': 'repartidor', 'isActive': False}, format='json')

        self.assertEqual(response.status_code, 200)
        row = next(p for p in self.fake.rows('user_profiles') if p['id'] == 'c1')
        self.assertEqual(row['role'], 'repartidor')
        self.assertFalse(row['is_active'])

    def test_delete_user(self):
        self.authenticate(self.admin)
        self.fake.auth.add_user('c1@fritolay.pe', 'x', user_id='c1')

        response = self.api.delete('/api/users/c1/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.fake.auth.deleted, ['c1'])

    def test_delete_user_failure(self):
        self.authenticate(self.admin)
        self.fake.auth.delete_error = 'User not found'

        response = self.api.delete('/api/users/zzz/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['message'], 'Error eliminando usuario')


class TestTokenAuthentication(SupabaseTestCase):

    def setUp(self):
        super().setUp()
        user = self.fake.auth.add_user('r1@fritolay.pe', 'clave', user_id='r1')
        self.session = self.fake.auth.issue_token(user)
        self.factory = APIRequestFactory()

    def _request(self, header):
        return self.factory.get('/api/mobile/dashboard/', HTTP_AUTHORIZATION=header)

    def test_valid_token(self):
        self.fake.seed('user_profiles', [make_profile('r1')])

        user, token = SupabaseTokenAuthentication().authenticate(
            self._request(f'Bearer {self.session.access_token}'),
        )

        self.assertEqual(user.id, 'r1')
        self.assertEqual(user.role, 'repartidor')
        self.assertTrue(user.is_active)
        self.assertEqual(token, self.session.access_token)

    def test_invalid_token(self):
        with self.assertRaises(exceptions.AuthenticationFailed):
            SupabaseTokenAuthentication().authenticate(self._request('Bearer expired'))

    def test_missing_profile(self):
        with self.assertRaises(exceptions.AuthenticationFailed):
            SupabaseTokenAuthentication().authenticate(
                self._request(f'Bearer {self.session.access_token}'),
            )

    def test_other_scheme_is_ignored(self):
        self.assertIsNone(SupabaseTokenAuthentication().authenticate(self._request('Basic abc')))

    def test_end_to_end_bearer_request(self):
        self.fake.seed('user_profiles', [make_profile('r1', role='admin')])

        response = self.api.get('/api/users/', HTTP_AUTHORIZATION=f'Bearer {self.session.access_token}')

        self.assertEqual(response.status_code, 200)


class TestHealth(SupabaseTestCase):

    def test_liveness(self):
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')

    def test_ready(self):
        with patch('core.supabase_client.is_supabase_available', return_value=True):
            response = self.client.get('/health/ready/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['checks']['supabase']['status'], 'healthy')

    def test_not_ready_when_unconfigured(self):
        with patch('core.supabase_client.is_supabase_available', return_value=False):
            response = self.client.get('/health/ready/')
        self.assertEqual(response.status_code, 503)

    def test_not_ready_when_backend_fails(self):
        self.fake.fail('user_profiles', 'connection refused')
        with patch('core.supabase_client.is_supabase_available', return_value=True):
            response = self.client.get('/health/ready/')
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['checks']['supabase']['error'], 'connection refused')

    def test_not_ready_when_backend_unreachable(self):
        self.fake.disconnect('user_profiles')
        with patch('core.supabase_client.is_supabase_available', return_value=True):
            response = self.client.get('/health/ready/')
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['checks']['supabase'], {
            'status': 'unhealthy',
            'error': 'connection refused',
        })


class TestExceptionHandler(SupabaseTestCase):

    def test_handler_is_wired(self):
        self.assertIs(api_settings.EXCEPTION_HANDLER, api_exception_handler)

    def test_service_error_body(self):
        response = api_exception_handler(NotFound('Pedido no encontrado'), {'view': None})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {'message': 'Pedido no encontrado'})

    def test_drf_errors_carry_message(self):
        response = api_exception_handler(exceptions.ValidationError({'email': ['Requerido']}), {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {'message': 'Datos inválidos', 'errors': {'email': ['Requerido']}})

    def test_unhandled_errors_fall_through(self):
        self.assertIsNone(api_exception_handler(ValueError('boom'), {}))
