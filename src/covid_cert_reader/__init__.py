"""
covid_cert_reader — EU Digital COVID Certificate (HCERT) decoder.

Turns the text of a DCC QR code ("HC1:...") into typed records:
base45 → zlib → COSE_Sign1 → CWT claims → DCC schema 1.3.0.

The signature is decoded but deliberately NOT verified.
"""

__version__ = "0.1.0"
