"""
Prompt templates for the Gemini extraction calls.

The JSON keys requested here are the external record keys consumed by
``FieldNormalizer``; keep both in sync.
"""

EXPENSE_CATEGORIES = [
    "Servicios",
    "Productos",
    "Impuestos",
    "Transporte",
    "Oficina",
    "Marketing",
    "Otros",
]

DEFAULT_CATEGORY = "Otros"


INVOICE_PROMPT = '''
Analiza esta factura y extrae los datos disponibles en formato JSON. Es importante que:

1. SOLO incluyas campos que encuentres claramente en la factura
2. Si un campo no está presente o no es claro, usa null
3. Las facturas pueden ser simples (solo proveedor, fecha, monto) o complejas (con todos los detalles)
4. Para montos, extrae solo números (sin símbolos de moneda)
5. Para fechas, usa formato YYYY-MM-DD
6. Para items, extrae cada línea de producto/servicio con su descripción, cantidad, precio unitario y subtotal

Estructura esperada:
{{
  "proveedor": "nombre de la empresa o proveedor (null si no se encuentra)",
  "fecha": "fecha de la factura en formato YYYY-MM-DD (null si no se encuentra)",
  "monto": "monto total de la factura (solo números, null si no se encuentra)",
  "numeroFactura": "número de factura o folio (null si no se encuentra)",
  "categoria": "categoría del gasto (servicios, productos, impuestos, etc., null si no se encuentra)",
  "moneda": "moneda (MXN, USD, EUR, null si no se encuentra)",
  "impuestos": "monto de impuestos (solo números, null si no se encuentra)",
  "subtotal": "subtotal antes de impuestos (solo números, null si no se encuentra)",
  "descuentos": "monto de descuentos (solo números, null si no se encuentra)",
  "fechaVencimiento": "fecha de vencimiento en formato YYYY-MM-DD (null si no se encuentra)",
  "metodoPago": "método de pago (efectivo, tarjeta, transferencia, etc., null si no se encuentra)",
  "direccionProveedor": "dirección del proveedor (null si no se encuentra)",
  "rfcProveedor": "RFC del proveedor (null si no se encuentra)",
  "items": [
    {{
      "descripcion": "descripción del producto o servicio",
      "cantidad": "cantidad (solo números, null si no se encuentra)",
      "precioUnitario": "precio unitario (solo números, null si no se encuentra)",
      "subtotal": "subtotal del item (solo números, null si no se encuentra)"
    }}
  ]
}}

Texto de la factura:
"""
{text}
"""

IMPORTANTE: Responde SOLO con el JSON válido, sin texto adicional.
'''


CLASSIFY_PROMPT = '''
Clasifica esta factura en una de las siguientes categorías:
- Servicios (luz, agua, internet, teléfono, etc.)
- Productos (materia prima, inventario, etc.)
- Impuestos (IVA, ISR, etc.)
- Transporte (gasolina, mantenimiento, etc.)
- Oficina (papelería, equipos, etc.)
- Marketing (publicidad, promociones, etc.)
- Otros

Proveedor: {provider}
Texto de la factura: {text}

Responde solo con la categoría más apropiada.
'''


BASIC_PROMPT = '''
Extrae los siguientes datos básicos de esta factura:

{text}

Devuelve SOLO un JSON con esta estructura:
{{
  "proveedor": "nombre del proveedor",
  "fecha": "fecha en formato YYYY-MM-DD",
  "monto": "monto total solo números"
}}
'''


def build_invoice_prompt(text: str) -> str:
    return INVOICE_PROMPT.format(text=text)


def build_classify_prompt(text: str, provider: str) -> str:
    return CLASSIFY_PROMPT.format(text=text, provider=provider or "")


def build_basic_prompt(text: str) -> str:
    return BASIC_PROMPT.format(text=text)
