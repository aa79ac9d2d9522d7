class NotesDriveError(Exception):
    """Base class for errors raised by the notes service."""


class RecordStoreError(NotesDriveError):
    pass


class NoteNotFoundError(RecordStoreError):
    def __init__(self, note_id: str):
        super().__init__(f"Note not found: {note_id}")
        self.note_id = note_id


class BlobStoreError(NotesDriveError):
    pass


class BlobNotFoundError(BlobStoreError):
    def __init__(self, path: str):
        super().__init__(f"Object not found: {path}")
        self.path = path


class AccessDeniedError(BlobStoreError):
    pass


class AuthError(NotesDriveError):
    pass
