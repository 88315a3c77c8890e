"""
Image to Code Generation

Turns a screenshot or mockup image into separate HTML markup and CSS stylesheet
text using a multimodal Large Language Model.
"""

__version__ = "0.1.0"
