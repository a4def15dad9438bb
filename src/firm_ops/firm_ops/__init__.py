"""firm-ops package.

Business-operations backend for small firms, organized by feature modules
(attendance, payroll, invoices, ...) with a thin Flask controller layer over
service/repository layers.
"""
