"""ADMS attendance package.

Fingerprint terminals push attendance events over the ADMS channel; the
service authenticates them, stores deduplicated records and produces monthly
reports. Organized by feature modules (devices, ingestion, attendance,
reports, exports) with a thin Flask controller layer over service/repository
layers.
"""
