# Services package init
"""
Invoicer Backend — Services Layer
===================================

What:  Logic between the routes (HTTP) and the ORM models (persistence).
How:   Plain functions and stateless services that receive the session and
       request context for every call.

Service Inventory:
    - includes.py:        include parameter resolution and scoping
    - query_filters.py:   account scope, eager loading, list filters, visibility
    - serializer.py:      item/collection envelopes, pagination, emit/emit_error
    - entity_service.py:  list/show workflow used by every entity route
"""
