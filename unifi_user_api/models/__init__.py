"""
Data models for UniFi user API responses.

.. warning::
    The dataclasses defined in this module represent commonly observed fields in the
    UniFi Controller's **undocumented** private API responses. The actual data returned
    can vary with the controller version and the station itself.

    Fields defined in the models may be missing from the actual API response (the
    attribute is then ``None``), and the response may contain additional, undocumented
    fields. Those are captured in the ``_extra_fields`` dictionary attribute and are sent
    back unchanged when the model is written to the controller.
"""

from .user import UnifiUser

__all__ = [
    "UnifiUser",
]
