class ConfigError(ValueError):
    """
    Raised when the export configuration cannot be honoured.

    The error is fatal to the current ``write`` call: rows and pages that were
    already emitted stay in the document, nothing is rolled back.
    """
