"""
Translation Sync Exceptions

Per-document failures. None of them aborts a run: callers skip the document
and record a finding.
"""


class TranslationSyncError(Exception):
    """Base exception for translation sync errors"""
    pass


class DocumentParseError(TranslationSyncError):
    """Raised when a reference or translated document cannot be decoded"""
    pass


class DocumentEncodingError(DocumentParseError):
    """Raised when a document is not valid UTF-8"""
    pass


class DocumentTooDeepError(DocumentParseError):
    """Raised when a tree nests deeper than the configured maximum depth"""
    pass
