"""Pure musical logic: coordinate mapping, scale snapping, quantization,
preview classification and settings. Nothing here needs a QApplication.
"""
