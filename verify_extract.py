import asyncio
import logging
import sys
from productmeta.pipeline import extract_many

# Configure logging
logging.basicConfig(level=logging.INFO)

async def main(urls):
    # Live check against real stores; expect some sites to block (403/503)
    urls = urls or [
        "https://www.amazon.com.mx/dp/B0BWK6PXZX",
        "https://www.mercadolibre.com.mx/",
        "https://www.example.com/",
    ]

    print(f"Extracting {len(urls)} URLs...")
    results = await extract_many(urls, concurrency=2)

    for r in results:
        print(f"URL: {r.get('url')}")
        print(f"Title: {r.get('title')}")
        print(f"Price: {r.get('price')} {r.get('currency')}")
        print(f"Image: {r.get('image_url')}")
        print(f"ASIN: {r.get('amazon_asin')}")
        print(f"Error: {r.get('error')}")
        print("-" * 20)

if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
