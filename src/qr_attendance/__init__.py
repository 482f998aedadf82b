"""QR attendance package.

Organised by feature modules (attendance, lessons, ...) with a thin Flask
controller layer over service and store layers.
"""
