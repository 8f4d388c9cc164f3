"""
github/ — El modelo de un sitio sobre la API REST de GitHub.

Módulos:
- client.py       → URLs de la API y requests autenticados
- models.py       → Dataclasses (commits, PRs, config, assets)
- errors.py       → Jerarquía de excepciones
- config_files.py → Carga en paralelo de _config.yml y navbar.yml
- drafts.py       → Branches _draft-<base64(ruta)>
- assets.py       → Listado y filtrado de uploads
- workflow.py     → draft → commit → PR → merge → limpieza
- navigation.py   → Entradas nuevas en _data/navbar.yml
- cloner.py       → Crear un sitio copiando otro repo
- series.py       → Pasos en serie con corte al primer error
- site.py         → SiteRepository, la fachada que usa la CLI
"""
