"""Errors raised by catalog services and translated to API responses by the views."""

from rest_framework import status


class CatalogError(Exception):
    """Base class. `status_code` is the HTTP status the views respond with."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_response_data(self):
        data = {'error': self.message}
        if self.details:
            data['details'] = self.details
        return data


class ImageUploadError(CatalogError):
    pass


class ImageStorageError(CatalogError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class EntityInUseError(CatalogError):
    status_code = status.HTTP_409_CONFLICT
