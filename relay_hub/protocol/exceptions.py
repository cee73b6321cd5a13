"""Relay Hub 协议异常定义

协议层（帧解析、参数校验）的异常体系。
"""


class ProtocolException(Exception):
    """协议基础异常

    所有协议层异常的基类。
    """

    pass


class ValidationException(ProtocolException):
    """帧或参数校验错误

    当事件名、参数个数或载荷结构不符合协议时抛出。
    """

    pass


class SerializationException(ProtocolException):
    """序列化/反序列化错误"""

    pass
