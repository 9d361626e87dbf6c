"""Models for the blobs app.

BlobRecord - one stored blob when the database backend is selected. The payload,
its metadata (the sniffed mime) and the expiry deadline live in the same row so a
write is a single insert.
"""
from tortoise import fields, models


class BlobRecord(models.Model):
    id = fields.CharField(pk=True, max_length=255)
    data = fields.BinaryField()
    metadata = fields.JSONField(default=dict)
    # unix timestamp, null means the row never expires
    expires_at = fields.BigIntField(null=True, index=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        default_connection = "default"
        table = "blobs"
