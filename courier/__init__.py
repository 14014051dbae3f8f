"""
COURIER App - Mobile API for FritoLay couriers (repartidores)

Lets couriers:
- Sign in and refresh their session
- See their dashboard and assigned deliveries
- Move deliveries through in_transit / delivered / failed
- Upload proof-of-delivery photos and send GPS points
"""
