# Routes package init
"""
Invoicer Backend — API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one entity type; all of them delegate to
       EntityService and return the serializer's response as-is.

Route Inventory:
    - clients.py:   GET /api/v1/clients, /api/v1/clients/{public_id}
    - contacts.py:  GET /api/v1/contacts, /api/v1/contacts/{public_id}
    - vendors.py:   GET /api/v1/vendors, /api/v1/vendors/{public_id}
    - invoices.py:  GET /api/v1/invoices, /api/v1/invoices/{public_id}
    - expenses.py:  GET /api/v1/expenses, /api/v1/expenses/{public_id}
    - users.py:     GET /api/v1/users, /api/v1/users/{public_id}
    - health.py:    GET /health

Design Principle:
    Routes are THIN: authentication and parameter parsing happen in the
    request context dependency, everything else in the services.
"""
