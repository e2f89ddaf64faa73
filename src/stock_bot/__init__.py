"""한국 주식 시세 디스코드 봇"""

__version__ = "0.1.0"
