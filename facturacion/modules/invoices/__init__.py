"""
Módulo de Facturación (Invoices)

- Creación de facturas como una transacción única: validación de stock,
  cálculo del total con el precio del catálogo, descuento de stock
  (compare-and-swap por producto), factura y líneas.
- Consultas: listado con cliente y detalle con líneas y productos.

Tablas principales:
- invoices: Facturas de venta
- invoice_line_items: Ítems de factura
"""
