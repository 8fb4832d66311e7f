from siamese_db.pipeline.cifar import convert_cifar_dataset
from siamese_db.pipeline.imageset import convert_image_pairs
from siamese_db.pipeline.inspect import inspect_store
from siamese_db.pipeline.writer import IngestionWriter, format_key

__all__ = [
    "convert_cifar_dataset",
    "convert_image_pairs",
    "inspect_store",
    "IngestionWriter",
    "format_key",
]
