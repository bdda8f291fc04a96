"""Identity warning.

ONLY id-change detection - emitted when a record's identity changed after
one of its uploads was committed under the old identity.
"""


class AttachmentIdentityWarning(UserWarning):
    """Committed files stay at the path computed from the old identity.

    Moving them is the caller's responsibility; nothing is migrated.
    """
