"""SmartRation receipt scanning: OCR line reconstruction and grocery item extraction."""

__version__ = "0.1.0"
