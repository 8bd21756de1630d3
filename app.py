"""Development entry point: ``python app.py`` serves the HR API locally."""

from src.hr_workflow.hr_workflow.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config["DEBUG"])
