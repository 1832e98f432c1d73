# vitrine/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    # O nome completo do path da aplicação
    name = 'vitrine.core'
    # Define o label curto para referência (ex: no shell ou migrações)
    label = 'core'
    verbose_name = 'Camada de Entidades e Lógica (Core)'

    # A camada Core não tem modelos; a app existe para os management commands.
    default_auto_field = 'django.db.models.BigAutoField'
