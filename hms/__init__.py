"""Hospital administration app.

Models, services, serializers, views and route registrations for the
patient registry, clinical records, ward/bed occupancy and billing.
"""
