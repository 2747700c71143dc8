"""Limites estruturais de respostas de interação do Discord."""

MAX_CONTENT_LENGTH = 2000
MAX_EMBEDS = 10
MAX_EMBED_TOTAL_CHARACTERS = 6000
MAX_COMPONENT_ROWS = 5
MAX_COMPONENTS_PER_ROW = 5
MAX_AUTOCOMPLETE_CHOICES = 25
MAX_CHOICE_NAME_LENGTH = 100
MAX_CHOICE_VALUE_LENGTH = 100
MAX_MODAL_TITLE_LENGTH = 45
MAX_CUSTOM_ID_LENGTH = 100
MIN_MODAL_ROWS = 1
MAX_MODAL_ROWS = 5
MAX_FILES = 10
MAX_FILENAME_LENGTH = 1024
