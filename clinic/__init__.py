"""Hospital operations application.

Models, services, serializers, views and routes for operating theaters,
surgery bookings, emergency alerts, the department token queue, pharmacy
and blood bank stock and the public information displays.
"""
