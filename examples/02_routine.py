"""
02_routine.py - Chain steps into a routine, save it and replay it
"""

import asyncio
from convertext import ConverText


async def main():
    app = ConverText()
    routine = await app.create_routine("Cleanup", owner_id="user_1")

    routine = await app.add_and_run_step(routine.id, "  b  \n\n  a  ", "remove empty lines")
    first = routine.steps[-1]
    print(f"Step 1 ({first.output.result.tool_used}): {first.output.result.converted_text!r}")

    routine = await app.carry_forward(routine.id, first.id)
    routine = await app.submit_step(routine.id, routine.steps[-1].id, "trim whitespace")
    routine = await app.carry_forward(routine.id, routine.steps[-1].id)
    routine = await app.submit_step(routine.id, routine.steps[-1].id, "sort lines")
    print(f"Final: {routine.steps[-1].output.result.converted_text!r} ({routine.status.value})")

    template = await app.save_template(routine.id, "Cleanup", "drop blanks, trim, sort")
    replayed = await app.replay_template(template.id, owner_id="user_1")
    for step in replayed.steps:
        routine = await app.submit_step(
            replayed.id, step.id, step.input.task_description, text="  z \n\n y"
        )
    print(f"Replayed {len(replayed.steps)} steps from template {template.id}")

    await app.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
