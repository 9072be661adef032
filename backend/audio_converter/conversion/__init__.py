from .service import ConversionService
from .models import ConversionRequest, ConversionResult, OutputFormat

__all__ = ["ConversionService", "ConversionRequest", "ConversionResult", "OutputFormat"]
