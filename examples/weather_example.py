"""Train a tree on the classic play-tennis table and classify a few days.

Shows the plain-Python workflow and the agent toolkit side by side:

- ``train_model`` induces a tree and stores it in a ``FileSystemStorage``
  (one directory per run, holding ``tree.json``, ``model.json`` and the
  subset CSVs written at every split).
- ``predict`` walks the tree. An unseen value stops the walk at the split it
  could not follow, and the probabilities come from that split's counts.
- The ``DecisionTreeToolkit`` tools return ``ToolCallError`` values instead of
  raising, which is what an LLM agent sees.
"""

import tempfile

from cattree import DecisionTreeToolkit, FileSystemStorage, Hyperparameters, enable_logging, predict, train_model
from cattree.tree import dump_tree_json

RECORDS = [
    {"outlook": "sunny", "temperature": "hot", "humidity": "high", "windy": "false", "play": "no"},
    {"outlook": "sunny", "temperature": "hot", "humidity": "high", "windy": "true", "play": "no"},
    {"outlook": "overcast", "temperature": "hot", "humidity": "high", "windy": "false", "play": "yes"},
    {"outlook": "rainy", "temperature": "mild", "humidity": "high", "windy": "false", "play": "yes"},
    {"outlook": "rainy", "temperature": "cool", "humidity": "normal", "windy": "false", "play": "yes"},
    {"outlook": "rainy", "temperature": "cool", "humidity": "normal", "windy": "true", "play": "no"},
    {"outlook": "overcast", "temperature": "cool", "humidity": "normal", "windy": "true", "play": "yes"},
    {"outlook": "sunny", "temperature": "mild", "humidity": "high", "windy": "false", "play": "no"},
    {"outlook": "sunny", "temperature": "cool", "humidity": "normal", "windy": "false", "play": "yes"},
    {"outlook": "rainy", "temperature": "mild", "humidity": "normal", "windy": "false", "play": "yes"},
    {"outlook": "sunny", "temperature": "mild", "humidity": "normal", "windy": "true", "play": "yes"},
    {"outlook": "overcast", "temperature": "mild", "humidity": "high", "windy": "true", "play": "yes"},
    {"outlook": "overcast", "temperature": "hot", "humidity": "normal", "windy": "false", "play": "yes"},
    {"outlook": "rainy", "temperature": "mild", "humidity": "high", "windy": "true", "play": "no"},
]

with tempfile.TemporaryDirectory() as root, enable_logging(level="DEBUG"):
    storage = FileSystemStorage(root)
    model = train_model(RECORDS, name="play-tennis", hyperparameters=Hyperparameters(max_depth=3), storage=storage)
    print(dump_tree_json(model.tree))

    print(predict(model.tree, {"outlook": "sunny", "humidity": "normal"}))
    # "foggy" never occurs in training: prediction comes from the root's class counts
    print(predict(model.tree, {"outlook": "foggy"}))

    toolkit = DecisionTreeToolkit(storage)
    print(toolkit.list_models())
    print(toolkit.predict_class({"outlook": "rainy", "windy": "true"}))
    print(toolkit.get_tree("run_00000000"))
