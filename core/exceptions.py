"""
Custom exceptions for the Guestbook API.
These exceptions represent specific logic errors
that can be converted to appropriate HTTP responses.
"""


class CommentNotFoundError(Exception):
    """Raised when a comment doesn't exist"""

    def __init__(self, comment_id: int):
        self.comment_id = comment_id
        self.message = f"Comment with ID {comment_id} not found"
        super().__init__(self.message)


class ConferenceNotFoundError(Exception):
    """Raised when a conference doesn't exist"""

    def __init__(self, conference_id: int):
        self.conference_id = conference_id
        self.message = f"Conference with ID {conference_id} not found"
        super().__init__(self.message)


class InvalidIriError(Exception):
    """Raised when a relation IRI is malformed or points to nothing"""

    def __init__(self, iri: str):
        self.iri = iri
        self.message = f'Item not found for "{iri}"'
        super().__init__(self.message)


class AccessDeniedError(Exception):
    """Raised when an authenticated user lacks the role an operation requires"""

    def __init__(self, user_id: int, role: str):
        self.user_id = user_id
        self.role = role
        self.message = f"User {user_id} does not have {role}"
        super().__init__(self.message)


class UnsupportedFormatError(Exception):
    """Raised when the Accept header asks for no format we can produce"""

    def __init__(self, accept: str):
        self.accept = accept
        self.message = f'Requested format "{accept}" is not supported'
        super().__init__(self.message)


class DuplicateUserError(Exception):
    """Raised when trying to register with an existing username or email"""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        self.message = f"{field.capitalize()} '{value}' is already registered"
        super().__init__(self.message)


class InvalidCredentialsError(Exception):
    """Raised when login credentials are incorrect"""

    def __init__(self):
        self.message = "Invalid username or password"
        super().__init__(self.message)
