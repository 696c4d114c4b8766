"""Utils package for CSP Manager

Catálogo de diretivas, erros de política e configuração de logging.
"""

__version__ = "1.0.0"
