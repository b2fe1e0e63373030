from .footer import MetadataProvider, ParquetFooterReader, model_from_arrow, read_metadata

__all__ = ["MetadataProvider", "ParquetFooterReader", "model_from_arrow", "read_metadata"]
