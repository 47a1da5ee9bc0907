"""Receipt OCR parsing: line reconstruction, field extraction and record assembly."""
