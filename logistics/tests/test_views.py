"""
Tests for the admin order endpoints.
"""

from core.tests.fakes import SupabaseTestCase, make_profile


class TestOrderEndpoints(SupabaseTestCase):

    def setUp(self):
        super().setUp()
        self.fake.seed('delivery_orders', [
            {'id': 'o1', 'created_by': 'c1', 'total': 15, 'created_at': '2026-10-01T10:00:00+00:00'},
        ])
        self.fake.seed('order_items', [{'id': 'i1', 'order_id': 'o1', 'quantity': 3, 'price': 5}])
        self.fake.seed('user_profiles', [make_profile('r1', role='repartidor')])
        self.authenticate(make_profile('admin-1', role='admin'))

    def test_list_orders_is_not_cached(self):
        response = self.api.get('/api/orders/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0]['calculatedTotal'], 15)
        self.assertEqual(response.data[0]['itemCount'], 3)
        self.assertIn('no-cache', response['Cache-Control'])

    def test_list_orders_backend_error(self):
        self.fake.fail('delivery_orders', 'connection reset')

        response = self.api.get('/api/orders/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error'], 'connection reset')

    def test_list_orders_backend_unreachable(self):
        self.fake.disconnect('delivery_orders')

        response = self.api.get('/api/orders/')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data, {
            'message': 'Supabase no está disponible',
            'error': 'connection refused',
        })

    def test_order_detail(self):
        response = self.api.get('/api/orders/o1/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['calculatedTotal'], 15)

    def test_order_detail_not_found(self):
        response = self.api.get('/api/orders/zzz/')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['message'], 'Pedido no encontrado')

    def test_assign_and_unassign(self):
        response = self.api.post('/api/orders/assign/', {'order_id': 'o1', 'repartidor_id': 'r1'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['repartidor_id'], 'r1')
        self.assertEqual(len(self.fake.rows('delivery_assignments')), 1)

        response = self.api.delete('/api/orders/assign/?order_id=o1')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.fake.rows('delivery_assignments'), [])

    def test_assign_missing_ids(self):
        response = self.api.post('/api/orders/assign/', {'order_id': 'o1'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'order_id y repartidor_id son requeridos')

    def test_unassign_missing_order_id(self):
        response = self.api.delete('/api/orders/assign/')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'order_id es requerido')

    def test_courier_cannot_list_orders(self):
        self.authenticate(make_profile('r1', role='repartidor'))

        self.assertEqual(self.api.get('/api/orders/').status_code, 403)
