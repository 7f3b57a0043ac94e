"""
Users and orders domain core.

Domain models, repository protocols and the services that orchestrate them
live at the top of this package. Concrete repository and event publisher
implementations live under ``shop.repos`` and the HTTP layer under
``shop.api``.
"""
