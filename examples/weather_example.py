"""Trains an ID3 tree on the play-tennis weather data with logging enabled.

id3kit logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle`` usable as a context manager.

Key concepts shown here:

- ``level="DEBUG"`` surfaces every split decision and any prediction that
  falls back to a node's first edge. The default ``TRAINING`` level (25)
  shows only train/load/import events.
- The trained model is exported as JSON and restored without retraining.
- ``summary()`` reads the tree back as IF/THEN rules.
"""

import polars as pl

from id3kit import ID3Classifier, enable_logging

weather = pl.DataFrame({
    "outlook": ["Sunny", "Sunny", "Overcast", "Rain", "Rain", "Rain", "Overcast",
                "Sunny", "Sunny", "Rain", "Sunny", "Overcast", "Overcast", "Rain"],
    "humidity": ["High", "High", "High", "High", "Normal", "Normal", "Normal",
                 "High", "Normal", "Normal", "Normal", "High", "Normal", "High"],
    "windy": [False, True, False, False, False, True, True, False, False, False, True, True, False, True],
    "play": ["No", "No", "Yes", "Yes", "Yes", "No", "Yes", "No", "Yes", "Yes", "Yes", "Yes", "Yes", "No"],
})

with enable_logging(level="DEBUG", log_format="full"):
    clf = ID3Classifier.train(weather, target="play", features=["outlook", "humidity", "windy"])

    # "Foggy" was never seen, so traversal follows the first outlook edge
    clf.predict({"outlook": "Foggy", "humidity": "Normal", "windy": False})

    print(f"\nTraining accuracy: {clf.evaluate(weather):.2f}\n")

for rule in clf.summary().rules:
    print(rule)

restored = ID3Classifier.load(clf.export().model_dump_json())
print(f"\nRestored: {restored!r}")
print(restored.predict_frame(weather.drop("play").head(3)))
