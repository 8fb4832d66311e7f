"""Protobuf wire format for paired records.

Records are stored as ``caffe.Datum`` messages so the resulting databases can
be fed to Caffe data layers unchanged. The message type is assembled at import
time from a descriptor instead of a generated ``_pb2`` module. Field 8 is an
extension of the Caffe message that only encoded records use: it marks where
the second image's compressed payload starts inside ``data``.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from siamese_db.types import PairedRecord

_F = descriptor_pb2.FieldDescriptorProto

_DATUM_FIELDS = (
    ("channels", 1, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
    ("height", 2, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
    ("width", 3, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
    ("data", 4, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
    ("label", 5, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
    ("float_data", 6, _F.TYPE_FLOAT, _F.LABEL_REPEATED, None),
    ("encoded", 7, _F.TYPE_BOOL, _F.LABEL_OPTIONAL, "false"),
    ("encoded_split", 8, _F.TYPE_INT32, _F.LABEL_OPTIONAL, None),
)


def _build_datum_class():
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="siamese_db/datum.proto",
        package="caffe",
        syntax="proto2",
    )
    message = file_proto.message_type.add(name="Datum")
    for name, number, field_type, label, default in _DATUM_FIELDS:
        field = message.field.add(name=name, number=number, type=field_type, label=label)
        if default is not None:
            field.default_value = default

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return message_factory.GetMessageClass(pool.FindMessageTypeByName("caffe.Datum"))


Datum = _build_datum_class()


def record_to_datum(record: PairedRecord):
    datum = Datum(
        channels=record.channels,
        height=record.height,
        width=record.width,
        data=record.data,
        label=record.label,
        encoded=record.encoded,
    )
    if record.encoded:
        datum.encoded_split = record.encoded_split
    return datum


def serialize_record(record: PairedRecord) -> bytes:
    return record_to_datum(record).SerializeToString()


def deserialize_record(payload: bytes) -> PairedRecord:
    datum = Datum()
    datum.ParseFromString(payload)
    return PairedRecord(
        channels=datum.channels,
        height=datum.height,
        width=datum.width,
        data=bytes(datum.data),
        label=datum.label,
        encoded=datum.encoded,
        encoded_split=datum.encoded_split,
    )
