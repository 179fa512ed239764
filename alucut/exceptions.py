"""
Excepciones del motor de corte Alucut
"""


class AlucutError(Exception):
    """Error base del motor de corte"""


class InvalidParametersError(AlucutError, ValueError):
    """Longitud de perfil o de pieza no positiva o no finita"""


class UnknownFormulaError(AlucutError, KeyError):
    """No existe fórmula para la combinación (tipo de ventana, línea)"""

    def __init__(self, window_type, line):
        self.window_type = window_type = getattr(window_type, "value", window_type)
        self.line = line = getattr(line, "value", line)
        super().__init__(f"No se encontraron fórmulas para {window_type} en línea {line}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidMeasurementError(AlucutError, ValueError):
    """Ancho o alto no numérico, no positivo o menor que los descuentos de la fórmula"""
