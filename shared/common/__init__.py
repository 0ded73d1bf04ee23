# Shared Common Library
# Authentication, permissions, error handling, pagination and request
# tracing shared by the platform's Django services.

__version__ = "1.0.0"
