"""Domain services: accounts, file catalog, blob storage and sharing."""
