"""holoforms_server — FastAPI REST API for the holoforms engine.

Serves published forms to the public (fetch and multipart submission),
and gives form owners builder CRUD, response listing and CSV export.
"""
