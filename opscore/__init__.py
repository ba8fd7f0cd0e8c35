"""Operations core for the healthops backend.

Tenant-scoped authentication, work shifts and their archival, archive
search and time & attendance, exposed as a JSON API.
"""
