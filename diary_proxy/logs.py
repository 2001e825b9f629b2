"""Диагностика сервера. Сюда никогда не попадает содержимое запросов."""

from datetime import datetime

LOG_FILE = ""


def configure(log_file: str):
    global LOG_FILE
    LOG_FILE = log_file


def log(msg: str):
    ts = datetime.now().strftime("%H:%M:%S")
    line = f"[{ts}] {msg}"
    print(line, flush=True)
    if LOG_FILE:
        # недоступный файл не должен ломать обработку запроса
        try:
            with open(LOG_FILE, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            print(f"[{ts}] LOG_FILE недоступен: {type(e).__name__}", flush=True)
