"""
BrickMatrix: agregación y recomendación de propiedades.

- ingestion: portales, pipeline de ingesta y feed de marketplaces
- recommendation: motores BrickMatrix™, inteligente, diversidad y unificado
- database: wishlist y comparación sobre un archivo JSON
"""
