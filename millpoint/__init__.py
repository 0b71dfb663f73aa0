"""MillPoint：NC 程序、机床与装夹单管理后端"""

__version__ = "1.0.0"
