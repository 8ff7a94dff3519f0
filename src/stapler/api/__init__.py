# API package (demo FastAPI routes)
