# Services package init
"""
CampFinder Backend — Services Layer
=====================================

Service Inventory:
    - query_builder:     raw query parameters → filters, sort, selection, page
    - filters:           typed filter expressions → SQLAlchemy clauses
    - Geocoder (abstract) / MapQuestGeocoder: address or zipcode → coordinates
    - FileService:       photo validation, storage and lookup
    - BootcampService:   list, CRUD, radius search, photo upload
"""
