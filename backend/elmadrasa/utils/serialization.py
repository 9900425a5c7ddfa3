"""MongoDB document serialization utilities."""

from datetime import datetime
from enum import Enum

from bson import ObjectId
from pydantic import BaseModel


def serialize_doc(doc):
    """Convert a MongoDB document (or model) to a JSON-safe value"""
    if doc is None:
        return None
    if isinstance(doc, BaseModel):
        return serialize_doc(doc.model_dump())
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, Enum):
        return doc.value
    if isinstance(doc, datetime):
        return doc.isoformat()
    if isinstance(doc, (list, tuple)):
        return [serialize_doc(d) for d in doc]
    if isinstance(doc, dict):
        return {key: serialize_doc(value) for key, value in doc.items() if key != "_id"}
    return doc


def to_document(model: BaseModel, **extra) -> dict:
    """Model -> dict ready for insert_one/$set (datetimes as ISO strings)"""
    doc = serialize_doc(model)
    doc.update(extra)
    return doc
