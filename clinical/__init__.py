"""Clinical application of the hospital information system.

Holds the reference catalogs, patients, admissions and vaccines together
with the services and views that expose them over the REST API.
"""
