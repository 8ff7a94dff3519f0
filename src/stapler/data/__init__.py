# Bundled demo data
