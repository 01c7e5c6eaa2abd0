"""Manufacturing CRM package.

Organized by feature modules (users, machines, tasks, analytics) with a thin
Flask controller layer over service/repository layers. Authorization for every
feature goes through ``auth.gate``.
"""
