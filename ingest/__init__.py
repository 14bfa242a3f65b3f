"""
Ingest pipeline: file grezzi → modello tabellare normalizzato.

- gate: routing per famiglia di formato (estensione / content type)
- csv_parser: testo delimitato (consumo incrementale)
- excel_parser: primo sheet del workbook
- text_extract: PDF/DOCX/TXT/immagini con euristica tabellare best-effort
- parser: dispatcher bytes → TabularData
- pipeline: parse → insight → report
"""
