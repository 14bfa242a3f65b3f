"""
OCR Extract - Estrazione testo da immagini e PDF scansionati.

Usa pytesseract (+ pdf2image per PDF senza layer di testo).
Il testo prodotto passa all'estrattore testuale (ingest.text_extract).
"""
import io
import logging

import pytesseract
from pdf2image import convert_from_bytes
from PIL import Image

logger = logging.getLogger(__name__)


def _ocr_image(image: Image.Image, languages: str) -> str:
    # Converti in RGB se necessario
    if image.mode != 'RGB':
        image = image.convert('RGB')
    return pytesseract.image_to_string(image, lang=languages)


def extract_text_from_image(image_content: bytes, languages: str = 'eng') -> str:
    """
    Estrae testo da immagine usando pytesseract.

    Args:
        image_content: Contenuto immagine (bytes)
        languages: Lingue tesseract (es. 'eng+ita')

    Returns:
        Testo estratto
    """
    try:
        image = Image.open(io.BytesIO(image_content))
        logger.debug(f"[OCR] Image loaded: {image.size}, mode: {image.mode}")

        ocr_text = _ocr_image(image, languages)

        logger.info(f"[OCR] OCR extracted {len(ocr_text)} characters from image")
        return ocr_text

    except Exception as e:
        logger.error(f"[OCR] Error extracting text from image: {e}", exc_info=True)
        raise


def extract_text_from_pdf(pdf_content: bytes, languages: str = 'eng') -> str:
    """
    Estrae testo da PDF rasterizzando le pagine (pdf2image) e applicando OCR.

    Args:
        pdf_content: Contenuto PDF (bytes)
        languages: Lingue tesseract

    Returns:
        Testo estratto (concatenato da tutte le pagine)
    """
    try:
        images = convert_from_bytes(pdf_content)
        logger.info(f"[OCR] PDF converted to {len(images)} images")

        all_text = []
        for page_idx, image in enumerate(images):
            try:
                page_text = _ocr_image(image, languages)
                all_text.append(page_text)
                logger.debug(f"[OCR] Page {page_idx + 1}/{len(images)}: {len(page_text)} characters")
            except Exception as e:
                logger.warning(f"[OCR] Error processing page {page_idx + 1}: {e}")
                continue

        full_text = '\n\n'.join(all_text)

        logger.info(f"[OCR] OCR extracted {len(full_text)} total characters from PDF ({len(images)} pages)")
        return full_text

    except Exception as e:
        logger.error(f"[OCR] Error extracting text from PDF: {e}", exc_info=True)
        raise
