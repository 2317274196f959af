# Routes package init
"""
CampFinder Backend — API Routes Package
=========================================

Route Inventory:
    - bootcamps.py:  /api/v1/bootcamps           (list, create)
                     /api/v1/bootcamps/{id}      (get, update, delete)
                     /api/v1/bootcamps/{id}/photo
                     /api/v1/bootcamps/radius/{zipcode}/{distance}
    - uploads.py:    GET /uploads/{filename}     (stored photos)
    - health.py:     GET /health

Routes are thin: read the request, call a service, return its envelope.
"""
