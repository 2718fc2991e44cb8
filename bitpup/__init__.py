"""bitpup - 极简包管理器（远程清单解析 + 依赖有序安装）"""

__version__ = "3.1.1"
