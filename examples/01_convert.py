"""
01_convert.py - One-off conversions with the offline evaluator
"""

import asyncio
from convertext import ConverText


async def main():
    app = ConverText()

    print("Task: Capitalize all words")
    result = await app.process_request("the quick brown fox", "Capitalize all words")
    print(f"Tool: {result.tool_used}")
    print(result.diff)

    print("Task: csv to json")
    result = await app.process_request("name,age\nAlice,28\nBob,35", "csv to json")
    print(result.converted_text)

    print("\nDirect call: repeatText")
    result = await app.execute("repeatText", ["ha", "3"])
    print(result.converted_text)

    await app.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
