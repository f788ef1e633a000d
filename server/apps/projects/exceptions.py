"""Exceptions for projects app."""

from server.apps.files.exceptions import ConflictError, NotFoundError


class ProjectDoesNotExistError(NotFoundError):
    """Raised when no project has the requested ID."""

    def __init__(self, project_id: int) -> None:
        """Initialize ProjectDoesNotExistError.

        Args:
            project_id: ID that did not resolve.
        """
        self.project_id = project_id
        super().__init__(f'Project not found: ID={project_id}')


class ProjectAlreadyExistsError(ConflictError):
    """Raised when a project slug is already taken."""

    def __init__(self, slug: str) -> None:
        """Initialize ProjectAlreadyExistsError.

        Args:
            slug: Conflicting slug.
        """
        self.slug = slug
        super().__init__(f'Project already exists: {slug}')


class VersionDoesNotExistError(NotFoundError):
    """Raised when no version has the requested ID."""

    def __init__(self, version_id: int, message: str | None = None) -> None:
        """Initialize VersionDoesNotExistError.

        Args:
            version_id: ID that did not resolve.
            message: Override for the default message.
        """
        self.version_id = version_id
        super().__init__(message or f'Version not found: ID={version_id}')


class VersionAlreadyExistsError(ConflictError):
    """Raised when a project already has a version with this name."""

    def __init__(self, project_id: int, name: str) -> None:
        """Initialize VersionAlreadyExistsError.

        Args:
            project_id: Owning project ID.
            name: Conflicting version name.
        """
        self.project_id = project_id
        self.name = name
        super().__init__(
            f'Version already exists: {name} (project ID: {project_id})',
        )


class VersionFileDoesNotExistError(VersionDoesNotExistError):
    """Raised when detaching a file that is not attached to the version.

    Subclasses VersionDoesNotExistError: the version/file relation
    did not resolve, which callers handle like a missing version.
    """

    def __init__(self, version_id: int, file_id: int) -> None:
        """Initialize VersionFileDoesNotExistError.

        Args:
            version_id: Version ID of the pair.
            file_id: File ID of the pair.
        """
        self.file_id = file_id
        super().__init__(
            version_id,
            f'File {file_id} is not attached to version {version_id}',
        )


class FileAlreadyAttachedError(ConflictError):
    """Raised when attaching a file that is already attached."""

    def __init__(self, version_id: int, file_id: int) -> None:
        """Initialize FileAlreadyAttachedError.

        Args:
            version_id: Version ID of the pair.
            file_id: File ID of the pair.
        """
        self.version_id = version_id
        self.file_id = file_id
        super().__init__(
            f'File {file_id} is already attached to version {version_id}',
        )
