import json
import os
from pathlib import Path


def read_constants():
    constants_file_path = os.path.join(
        Path(__file__).absolute().parent, "config", "constants.json"
    )
    with open(constants_file_path, "r") as constants_json:
        return json.load(constants_json)


CONSTANTS = read_constants()
