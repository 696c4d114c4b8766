import logging
import logging.handlers
import json
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = 'csp_manager'
TEXT_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

# Marca os handlers criados aqui para não duplicá-los a cada create_app()
_HANDLER_MARK = '_csp_manager_handler'

class StructuredFormatter(logging.Formatter):
    """
    Formatter personalizado para logs estruturados em JSON.
    """

    EXTRA_FIELDS = ('request_id', 'csp_context', 'policy_mode', 'operation')

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, ensure_ascii=False)

def build_formatter(log_format: str = 'text') -> logging.Formatter:
    if (log_format or '').lower() == 'json':
        return StructuredFormatter()
    return logging.Formatter(TEXT_FORMAT)

def configure_package_logger(
    log_level: str = 'INFO',
    log_format: str = 'text',
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configura o logger do pacote.

    Args:
        log_level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'text' ou 'json'
        log_file: Arquivo com rotação; None desativa o log em arquivo

    Returns:
        logging.Logger: logger 'csp_manager'
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    level = getattr(logging, (log_level or 'INFO').upper(), logging.INFO)
    logger.setLevel(level)

    # Remover handlers criados por uma configuração anterior
    for handler in logger.handlers[:]:
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = build_formatter(log_format)

    if log_file:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            setattr(file_handler, _HANDLER_MARK, True)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"File logging disabled ({log_path}): {e}")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_MARK, True)
    logger.addHandler(console_handler)

    return logger
