# Services Module
# Submodules are imported directly (pos_retail.services.backend, ...) to keep
# the cart package free of import cycles.
