# Routes package init
"""
Notes API - API Routes Package
================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - notes.py:        POST   /write            (create a note from form fields)
                       GET    /notes            (list all notes)
                       GET    /notes/{name}     (read one note)
                       PUT    /notes/{name}     (replace a note's text)
                       DELETE /notes/{name}     (delete a note)
    - upload_form.py:  GET    /UploadForm.html  (static HTML form)
    - health.py:       GET    /health           (service health check)

Routes stay thin: they extract request data, call the NoteStore, and pick
the status code. Errors propagate as NotesError subclasses and are turned
into responses by the handlers registered in main.py.
"""
